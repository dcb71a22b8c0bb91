"""
Prompt templates for document classification and field extraction.
"""

CLASSIFY_SYSTEM_PROMPT = """You are a document classifier for travel documents.

Classify the document as one of: hotel, flight, or car.

Rules:
- Return ONLY a JSON object: {"doc_type": "hotel" | "flight" | "car", "confidence": <number 0-1>}
- "hotel" for hotel/accommodation bookings
- "flight" for airline tickets/boarding passes/e-tickets
- "car" for car rental/vehicle reservations
- Do NOT add explanations"""

EXTRACT_SYSTEM_PROMPT = """You are a travel booking data extractor.

Rules:
- If a field is missing or unclear, OMIT it - do NOT invent values
- Return strictly valid JSON matching the requested keys
- No explanations or additional text"""

FLIGHT_EXTRACT_TEMPLATE = """Extract flight information from the following text.

- Extract ALL flight segments if this is a multi-leg journey
- Return {{"segments": [...], "confirmationNumber": ..., "passengerName": ...}}
- For each segment, extract: departAirport, arriveAirport, departTime, arriveTime, flightNumber, airline
- Use IATA airport codes when available (e.g., SFO, JFK)
- For times, use ISO 8601 format if possible, or keep as-is if the format is unclear

Document text:
{text}"""

HOTEL_EXTRACT_TEMPLATE = """Extract hotel booking information from the following text.

- Extract: propertyName, checkInDate, checkOutDate, confirmationNumber, address, guestName
- For dates, use ISO format YYYY-MM-DD if possible

Document text:
{text}"""

CAR_EXTRACT_TEMPLATE = """Extract car rental information from the following text.

- Extract: pickupLocation, dropoffLocation, pickupTime, dropoffTime, confirmationNumber, vehicleType, rentalCompany
- For times, use ISO 8601 format if possible
- Use IATA codes for airport locations when available

Document text:
{text}"""

EXTRACT_TEMPLATES = {
    "flight": FLIGHT_EXTRACT_TEMPLATE,
    "hotel": HOTEL_EXTRACT_TEMPLATE,
    "car": CAR_EXTRACT_TEMPLATE,
}

OCR_SYSTEM_PROMPT = """You transcribe travel documents.

Return the full text content of the attached document as markdown.
Keep every date, time, code, name and number exactly as printed.
Do not summarize or add commentary."""
