"""
Notebook Synthesis Package
══════════════════════════

  stores.py     ABCs for the notebook / knowledge element / annotation stores
  formatter.py  Per-item body decoration (academic | casual | structured | minimal)
  resolver.py   One composition reference → at most one compiled section
  markup.py     Minimal inline markup → escaped HTML
  templates.py  Jinja2 base layout + per-template presentation constants
  engine.py     Scoped rendering engine sessions (WeasyPrint)
  renderer.py   Formatted text and paginated document output

The orchestrating pipeline lives in notecraft.services.synthesis.
"""
