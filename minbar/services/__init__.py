"""Application services: content CRUD, users, site flags, media and feeds"""
