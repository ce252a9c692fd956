"""
Core Mixins Package

Mixins riutilizzabili per le views (vedi view_mixins).
"""
