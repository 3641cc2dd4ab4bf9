"""Core — pure error types and parsing helpers. No I/O, no framework imports."""
