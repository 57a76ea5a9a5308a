"""
User choice logging and popularity ranking.

Choices are counted in a key-value increment store; the pipeline itself
never reads these counters.
"""
