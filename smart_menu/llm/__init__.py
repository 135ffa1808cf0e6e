"""
LLM integration layer.

Responsibilities:
- Manage Groq API configuration and credentials.
- Build prompts describing a dish and the meal occasion.
- Call Groq LLM to annotate dishes (calorie estimates).
- Fall back to the offline calorie calculator when the LLM is unavailable
  or returns invalid output.
"""
