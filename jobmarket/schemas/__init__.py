"""
Schemas module - API contract (what the client sends and receives).

All request and response models live in jobmarket.schemas.schemas.
"""
