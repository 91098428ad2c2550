"""HTTP layer for the Minbar content backend (FastAPI)"""
