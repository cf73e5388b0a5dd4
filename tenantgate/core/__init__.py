"""Core application components.

This module provides the foundational components for the tenantgate API:
- Supabase client lifecycle management
- Typed, organization-scoped query specifications
- Application settings and configuration
"""
