"""Packet and fragment formats, compression, timing, RTT estimation, port ranges
and server session helpers for a roaming remote shell over UDP."""

__version__ = "0.1.0"