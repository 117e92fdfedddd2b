"""Version spec resolution engine.

- defaults.py: spec/default file loading and layered defaults merging
- validate.py: per-type required field checks
- enrich.py: derived fields (source kind, composite repository ids)
- rows.py: projection of upstream records into version rows
- select.py: matching/filtering and final selection
- service.py: batch orchestration across all components
"""
