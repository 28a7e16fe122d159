INTENT_PROMPT = """You are a travel assistant. Analyze the user's message and determine their intent.

If they want to search for flights, extract the following information and return ONLY a JSON object:
{{
  "intent": "search_flights",
  "origin": "IATA code or city name",
  "destination": "IATA code or city name",
  "departDate": "YYYY-MM-DD",
  "returnDate": "YYYY-MM-DD" (optional for round trips),
  "round": true/false,
  "adults": number (default 1),
  "currency": "USD/KRW/EUR/etc" (optional)
}}

If it's not a flight search, just respond naturally with helpful travel advice.
Do NOT include any text outside the JSON when intent is search_flights.
Today's date for reference: {today}"""

SUMMARY_PROMPT = """Summarize these flight search results in a friendly, concise way for a mobile chat interface.
Keep it under 3 sentences. Mention the cheapest option and flight duration range.
Be conversational and helpful."""

CARDS_PROMPT = """Create 3 travel info cards for {destination}.
Return ONLY a JSON array with this structure:
[
  {{"title": "Local Food", "summary": "Must-try dishes and restaurants", "url": "optional"}},
  {{"title": "Top Attractions", "summary": "Popular sights and activities", "url": "optional"}},
  {{"title": "Travel Tips", "summary": "Useful local information", "url": "optional"}}
]"""

CARDS_USER = "Destination: {destination}"

NO_RESULTS_MESSAGE = (
    "Sorry, I couldn't find any flights matching those details. "
    "Would you like to try different dates or destinations?"
)
