"""
Shelfwise command layer - argparse CLI, one JSON document per invocation.
"""
