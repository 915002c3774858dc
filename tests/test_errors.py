import json

from shared.errors import (
    ConfigurationError,
    ProviderUnavailableError,
    UpstreamAPIError,
    ValidationError,
    user_message,
)


def test_validation_envelope_carries_details():
    details = [{"field": "prompt", "message": "Prompt is required", "value": None}]
    body = ValidationError(details=details).to_envelope()
    assert body["error"] == "Validation Error"
    assert body["message"] == "Request validation failed"
    assert body["details"] == details
    assert body["userMessage"] == user_message(400)
    assert "provider" not in body
    assert "stack" not in body


def test_upstream_error_uses_forwarded_status():
    error = UpstreamAPIError("Invalid API key", 401, "groq")
    assert error.status_code == 401
    body = error.to_envelope()
    assert body["error"] == "API Error"
    assert body["provider"] == "groq"
    assert body["userMessage"].startswith("Unauthorized")


def test_configuration_error_names_provider():
    body = ConfigurationError("API key not configured for google", provider="google").to_envelope()
    assert body["error"] == "Configuration Error"
    assert body["provider"] == "google"


def test_provider_unavailable_is_503():
    error = ProviderUnavailableError("groq")
    assert error.status_code == 503
    assert error.message == "Provider 'groq' is not configured or API key is missing"


def test_unknown_status_gets_generic_user_message():
    assert user_message(418) == "An unexpected error occurred"


def test_details_with_non_finite_values_stay_renderable():
    error = ValidationError(
        details=[
            {"field": "parameters.temperature", "message": "bad", "value": float("nan")},
            {"field": "parameters", "message": "bad", "value": {"top_p": [float("-inf")]}},
        ]
    )
    body = error.to_envelope()
    assert body["details"][0]["value"] == "nan"
    assert body["details"][1]["value"] == {"top_p": ["-inf"]}
    json.dumps(body, allow_nan=False)
