"""
Sport Manager - match roster service

Responsibilities:
- Match catalog (create matches, inherit venue defaults)
- Match roster (join/leave within capacity, cancel/restore)
- Player directory (name-based player identity)
- HTTP API and chat-bot command front ends over the same operations
"""
