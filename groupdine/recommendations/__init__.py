"""
Group-dining recommendation engine.

Responsibilities:
- Accept dining criteria (date, time, budget, cuisine, location, purpose).
- Retrieve and enrich candidates from the place provider.
- Narrow them with heuristics and two LLM stages.
- Return ranked, explained recommendations ready for API serialisation.
"""
