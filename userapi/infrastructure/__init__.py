"""Infrastructure Layer — database pool, repositories, migrations, logging.

Invariants:
    - Infrastructure implements core/ protocols; core never imports from here
"""
