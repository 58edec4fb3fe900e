"""
Test suite for cschema.

Unit tests cover the definitions, the codecs, the merge and edit helpers,
agreement polling, the transports and the system manager, which is also
exercised end to end against the in-memory cluster.
"""
