"""Fallback content used when AI output lacks a field."""

SUMMARY_MAX_CHARS = 300

GENERIC_SUMMARY = (
    "Analysis complete. The lab results were processed successfully. "
    "See the recommendations for more information."
)

TEXT_RESPONSE_RECOMMENDATION = (
    "Consult a specialist for a complete interpretation of these results."
)

MARKER_RECOMMENDATIONS = (
    "Consult a physician to interpret the markers outside the reference range.",
    "Consider repeating the tests after an appropriate interval to confirm the results.",
)

WELLNESS_RECOMMENDATIONS = (
    "Maintain healthy habits such as a balanced diet and regular physical activity.",
    "Have routine check-ups periodically as recommended by your physician.",
)

MARKER_PLACEHOLDERS = {
    "value": "--",
    "unit": "",
    "reference_range": "Not specified",
    "interpretation": "Outside reference range",
}


def marker_summary(count: int) -> str:
    if count == 1:
        found = "1 value outside the reference range was found."
    else:
        found = f"{count} values outside the reference range were found."
    return f"{found} Review the details below and consult a health professional."


def truncate(text: str, limit: int = SUMMARY_MAX_CHARS) -> str:
    text = text.strip()
    if len(text) <= limit:
        return text
    return text[:limit].rstrip() + "..."
