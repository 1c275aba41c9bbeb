"""Core interfaces: camera capture and QR decoding abstractions."""
