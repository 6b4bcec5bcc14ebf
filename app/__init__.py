"""
AI Aggregate: one prompt, several AI providers

Sends each prompt concurrently to every provider with a configured API
key (Claude, ChatGPT, Gemini, Grok) and keeps an independent transcript
and dispatch state per provider, so one slow or failing provider never
affects the others.
"""

__version__ = "0.1.0"
