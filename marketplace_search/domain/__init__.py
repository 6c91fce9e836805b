"""
Domain layer - Core search entities and domain rules.

This layer contains the record variants, filter options and scoring outcomes,
independent of any infrastructure or framework concerns.
"""
