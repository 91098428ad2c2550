"""Authentication: password hashing, sessions and pluggable authenticators"""
