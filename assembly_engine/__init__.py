"""Assembly governance engine.

Meeting lifecycle, quorum, proxy resolution and tally consolidation for
deliberative assemblies.
"""

__version__ = "0.1.0"
