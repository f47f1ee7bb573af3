"""
patchtracker - Client for a patch review tracker server.

Records local git commit ranges as patch-sets, uploads the patch bodies with
a TrackedAt provenance marker, and drives review state (ack, nack, push,
obsolete) from the command line.
"""

__version__ = "0.1.0"
