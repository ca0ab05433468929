"""Code shared by the roster core and its front ends."""
