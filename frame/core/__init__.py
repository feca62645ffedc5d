"""Client, registry, dispatcher and the plumbing they share.

Submodules are imported directly (``frame.core.client`` and so on) so that
importing a helper such as ``frame.core.utils`` stays cheap.
"""
