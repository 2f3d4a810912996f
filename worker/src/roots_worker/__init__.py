"""ROOTS worker: schema-constrained Gemini requests and speech playback."""
