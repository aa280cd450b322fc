"""Pydantic schemas for tokens, registry entities and form input"""
