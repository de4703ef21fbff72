"""Core application components.

This module provides the foundational components for the Resource Sharing API:
- Database connection management via Prisma
- Application settings and configuration
"""
