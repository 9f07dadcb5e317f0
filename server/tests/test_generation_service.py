# ─────────────────────────────────────────────────────────────────────────────
# Generation Service Tests — EventGenerationService + parsing helpers
# ─────────────────────────────────────────────────────────────────────────────

import pytest
from conftest import CATEGORIES, CITIES, VALID_PROMPT, model_json, png_data_url, valid_body

from eventara.config import Settings
from eventara.exceptions import (
    GenerationFailedError,
    ImageGenerationError,
    InvalidRequestError,
    RateLimitedError,
    SchemaViolationError,
    ServiceUnavailableError,
)
from eventara.rate_limit import SlidingWindowRateLimiter
from eventara.schemas import GenerationRequest
from eventara.services.generation import (
    EventGenerationService,
    parse_event_details,
    parse_generation_request,
)
from eventara.services.metrics import GenerationMetrics


def _request(**overrides) -> GenerationRequest:
    return GenerationRequest.model_validate(valid_body(**overrides))


class TestParseGenerationRequest:
    def test_valid(self, test_settings):
        request = parse_generation_request(valid_body(), test_settings)
        assert request.prompt == VALID_PROMPT
        assert [c.id for c in request.selectable_categories] == ["music", "food"]
        assert request.inline_image is None

    def test_empty_image_string_is_no_image(self, test_settings):
        request = parse_generation_request(valid_body(imageBase64=""), test_settings)
        assert request.image_base64 is None

    def test_min_length_from_settings(self):
        settings = Settings(min_prompt_length=50)
        with pytest.raises(InvalidRequestError, match="at least 50 characters"):
            parse_generation_request(valid_body(), settings)

    def test_image_size_cap_from_settings(self):
        settings = Settings(max_image_bytes=10)
        with pytest.raises(InvalidRequestError, match="cannot exceed"):
            parse_generation_request(valid_body(imageBase64=png_data_url()), settings)

    def test_corrupt_image_bytes(self, test_settings):
        payload = "data:image/png;base64,aGVsbG8gd29ybGQ="
        with pytest.raises(InvalidRequestError, match="not a readable image"):
            parse_generation_request(valid_body(imageBase64=payload), test_settings)

    def test_missing_reported_before_invalid(self, test_settings):
        body = {"prompt": "short", "categories": CATEGORIES}
        with pytest.raises(InvalidRequestError, match='Missing required parameter: "cities"'):
            parse_generation_request(body, test_settings)

    def test_nested_missing_key_is_not_a_missing_parameter(self, test_settings):
        body = valid_body(cities=[{"id": "erbil"}])
        with pytest.raises(InvalidRequestError) as exc_info:
            parse_generation_request(body, test_settings)
        assert "Missing required parameter" not in exc_info.value.message
        assert exc_info.value.message.startswith('Validation Error: "cities" contains an invalid entry')

    def test_non_object_payload(self, test_settings):
        with pytest.raises(InvalidRequestError, match="expected an object"):
            parse_generation_request("prompt", test_settings)


class TestParseEventDetails:
    def test_valid(self):
        details = parse_event_details(model_json(), {"erbil"}, {"music"})
        assert details.suggested_city_id == "erbil"
        assert details.image_prompt

    # The caller-facing message is generic; the diagnostic lives in `details`.

    def test_invalid_json(self):
        with pytest.raises(SchemaViolationError) as exc_info:
            parse_event_details("{", {"erbil"}, {"music"})
        assert "not valid JSON" in exc_info.value.details

    def test_missing_image_prompt(self):
        with pytest.raises(SchemaViolationError) as exc_info:
            parse_event_details(model_json(imagePrompt=""), {"erbil"}, {"music"})
        assert "did not match" in exc_info.value.details

    def test_all_category_rejected(self):
        with pytest.raises(SchemaViolationError) as exc_info:
            parse_event_details(model_json(category_id="all"), {"erbil"}, {"music"})
        assert "category id 'all'" in exc_info.value.details
        assert exc_info.value.message == "The AI service failed to process the request."


class TestEventGenerationService:
    async def test_success(self, service, mock_model, metrics):
        result = await service.generate(_request(), caller="1.2.3.4")
        assert result.suggested_city_id == "erbil"
        assert result.generated_image_base64
        assert metrics.successes == 1

    async def test_rate_limited_before_model(self, mock_model, test_settings):
        limiter = SlidingWindowRateLimiter("1/30 seconds")
        metrics = GenerationMetrics()
        service = EventGenerationService(mock_model, limiter, test_settings, metrics=metrics)

        await service.generate(_request(), caller="a")
        with pytest.raises(RateLimitedError) as exc_info:
            await service.generate(_request(), caller="a")

        assert exc_info.value.limit == 1
        assert mock_model.generate_structured.await_count == 1
        assert metrics.rate_limited == 1

    async def test_unconfigured(self, rate_limiter, test_settings, metrics):
        service = EventGenerationService(None, rate_limiter, test_settings, metrics=metrics)
        assert service.is_configured is False
        with pytest.raises(ServiceUnavailableError):
            await service.generate(_request(), caller="a")
        assert metrics.unconfigured == 1

    async def test_zero_images(self, service, mock_model, metrics):
        mock_model.generate_images.return_value = []
        with pytest.raises(ImageGenerationError):
            await service.generate(_request(), caller="a")
        assert metrics.failures["image_missing"] == 1

    async def test_extra_images_discarded(self, service, mock_model):
        first, second = b"\x89PNG-first", b"\x89PNG-second"
        mock_model.generate_images.return_value = [first, second]
        result = await service.generate(_request(), caller="a")
        assert result.generated_image_base64 == "iVBORy1maXJzdA=="

    async def test_schema_violation_counted(self, service, mock_model, metrics):
        mock_model.generate_structured.return_value = "nope"
        with pytest.raises(SchemaViolationError):
            await service.generate(_request(), caller="a")
        assert metrics.failures["schema_violation"] == 1
        mock_model.generate_images.assert_not_called()

    async def test_unexpected_exception_wrapped(self, service, mock_model, metrics):
        mock_model.generate_images.side_effect = ConnectionError("reset by peer")
        with pytest.raises(GenerationFailedError) as exc_info:
            await service.generate(_request(), caller="a")
        assert exc_info.value.details == "Upstream model error (ConnectionError)."
        assert isinstance(exc_info.value.__cause__, ConnectionError)
        assert metrics.failures["model_error"] == 1

    async def test_image_request_sends_image_first(self, service, mock_model):
        await service.generate(_request(imageBase64=png_data_url()), caller="a")
        parts = mock_model.generate_structured.call_args.kwargs["parts"]
        assert parts[0].mime_type == "image/png"
        assert isinstance(parts[1], str)

    async def test_cities_offered_in_order(self, service, mock_model):
        await service.generate(_request(), caller="a")
        schema = mock_model.generate_structured.call_args.kwargs["response_schema"]
        assert schema["properties"]["suggestedCityId"]["enum"] == [c["id"] for c in CITIES]
