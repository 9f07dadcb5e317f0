# ─────────────────────────────────────────────────────────────────────────────
# Generation Endpoint Tests — POST /api/generate-event
# ─────────────────────────────────────────────────────────────────────────────
# Check order: method → JSON → fields → sliding window → credential → model.
# The model client is a MagicMock (see conftest.py); no network is used.
# ─────────────────────────────────────────────────────────────────────────────

import base64

import pytest
from conftest import VALID_PROMPT, model_json, png_data_url, valid_body
from dirty_equals import IsPositiveInt, IsStr

from eventara.pipeline.encoding import InlineImage, verify_image

URL = "/api/generate-event"


class TestMethodCheck:
    @pytest.mark.parametrize("method", ["GET", "PUT", "PATCH", "DELETE"])
    def test_non_post_is_405(self, client, method):
        response = client.request(method, URL)
        assert response.status_code == 405
        assert response.headers["allow"] == "POST"
        assert response.json()["error"] == f"Method {method} Not Allowed"

    @pytest.mark.parametrize("method", ["HEAD", "OPTIONS"])
    def test_head_and_bare_options_are_405(self, client, method):
        response = client.request(method, URL)
        assert response.status_code == 405
        assert response.headers["allow"] == "POST"

    def test_405_does_not_touch_model(self, client, mock_model):
        client.get(URL)
        mock_model.generate_structured.assert_not_called()

    def test_cors_preflight_is_answered(self, client):
        response = client.options(
            URL,
            headers={
                "Origin": "https://app.example.com",
                "Access-Control-Request-Method": "POST",
            },
        )
        assert response.status_code == 200


class TestBodyValidation:
    """Every malformed request is a 400 whose message names the problem."""

    def test_malformed_json(self, client):
        response = client.post(
            URL, content=b"{not json", headers={"Content-Type": "application/json"}
        )
        assert response.status_code == 400
        assert response.json()["error"] == "Invalid JSON in request body."

    def test_empty_body(self, client):
        response = client.post(URL, content=b"")
        assert response.status_code == 400
        assert response.json()["error"] == "Invalid JSON in request body."

    def test_json_array_rejected(self, client):
        response = client.post(URL, json=[1, 2, 3])
        assert response.status_code == 400
        assert "expected an object" in response.json()["error"]

    @pytest.mark.parametrize("field", ["prompt", "cities", "categories"])
    def test_missing_field_named(self, client, field):
        body = valid_body()
        del body[field]
        response = client.post(URL, json=body)
        assert response.status_code == 400
        assert response.json()["error"] == f'Missing required parameter: "{field}".'

    def test_short_prompt(self, client, mock_model):
        response = client.post(URL, json=valid_body(prompt="too short"))
        assert response.status_code == 400
        assert response.json()["error"] == (
            'Validation Error: "prompt" must be a non-empty string of at least 10 characters.'
        )
        mock_model.generate_structured.assert_not_called()
        mock_model.generate_images.assert_not_called()

    def test_whitespace_padding_does_not_count(self, client):
        response = client.post(URL, json=valid_body(prompt="   short    "))
        assert response.status_code == 400

    def test_non_string_prompt(self, client):
        response = client.post(URL, json=valid_body(prompt=12345678901))
        assert response.status_code == 400
        assert '"prompt"' in response.json()["error"]

    def test_overlong_prompt(self, client):
        response = client.post(URL, json=valid_body(prompt="x" * 2001))
        assert response.status_code == 400
        assert "cannot exceed 2000 characters" in response.json()["error"]

    @pytest.mark.parametrize("field", ["cities", "categories"])
    def test_empty_list(self, client, field):
        response = client.post(URL, json=valid_body(**{field: []}))
        assert response.status_code == 400
        assert response.json()["error"] == (
            f'Validation Error: "{field}" must be a non-empty array of {{id, name}} objects.'
        )

    def test_only_all_category(self, client):
        body = valid_body(categories=[{"id": "all", "name": {"en": "All"}}])
        response = client.post(URL, json=body)
        assert response.status_code == 400
        assert "other than 'all'" in response.json()["error"]

    def test_image_must_be_data_url(self, client):
        response = client.post(URL, json=valid_body(imageBase64="definitely-not-base64"))
        assert response.status_code == 400
        assert '"imageBase64"' in response.json()["error"]

    def test_image_must_be_image_mime(self, client):
        payload = "data:text/plain;base64," + base64.b64encode(b"hello").decode()
        response = client.post(URL, json=valid_body(imageBase64=payload))
        assert response.status_code == 400
        assert "must be an image" in response.json()["error"]

    def test_invalid_requests_do_not_consume_quota(self, client):
        for _ in range(5):
            assert client.post(URL, json=valid_body(prompt="short")).status_code == 400
        for _ in range(5):
            assert client.post(URL, json=valid_body()).status_code == 200


class TestRateLimit:
    def test_sixth_request_in_window_is_429(self, client, mock_model):
        for _ in range(5):
            assert client.post(URL, json=valid_body()).status_code == 200

        response = client.post(URL, json=valid_body())
        assert response.status_code == 429
        assert response.json()["error"] == (
            "Too many requests. Please try again after a short break."
        )
        assert mock_model.generate_structured.await_count == 5

    def test_429_carries_quota_headers(self, client):
        for _ in range(5):
            client.post(URL, json=valid_body())
        response = client.post(URL, json=valid_body())
        assert response.headers["x-ratelimit-limit"] == "5"
        assert response.headers["x-ratelimit-remaining"] == "0"
        assert response.headers["x-ratelimit-reset"] == IsStr(regex=r".+ GMT")
        assert int(response.headers["retry-after"]) == IsPositiveInt

    def test_rate_limit_precedes_credential_check(self, unconfigured_client):
        statuses = [
            unconfigured_client.post(URL, json=valid_body()).status_code for _ in range(6)
        ]
        assert statuses == [503] * 5 + [429]


class TestCredential:
    def test_missing_key_is_503(self, unconfigured_client):
        response = unconfigured_client.post(URL, json=valid_body())
        assert response.status_code == 503
        assert response.json()["error"] == (
            "Server configuration error. The AI service is currently unavailable."
        )


class TestModelFailures:
    def test_zero_images_is_500(self, client, mock_model):
        mock_model.generate_images.return_value = []
        response = client.post(URL, json=valid_body())
        assert response.status_code == 500
        assert response.json() == {
            "error": "The AI service failed to process the request.",
            "type": "ImageGenerationError",
            "details": "AI failed to generate an image after generating text.",
        }

    def test_non_json_text_is_500(self, client, mock_model):
        mock_model.generate_structured.return_value = "Sure! Here is your event:"
        response = client.post(URL, json=valid_body())
        assert response.status_code == 500
        assert response.json()["type"] == "SchemaViolationError"
        mock_model.generate_images.assert_not_called()

    def test_missing_locale_is_500(self, client, mock_model):
        mock_model.generate_structured.return_value = model_json(title={"en": "Only English"})
        response = client.post(URL, json=valid_body())
        assert response.status_code == 500
        assert response.json()["type"] == "SchemaViolationError"

    def test_unknown_city_is_500(self, client, mock_model):
        mock_model.generate_structured.return_value = model_json(city_id="baghdad")
        response = client.post(URL, json=valid_body())
        assert response.status_code == 500
        assert "baghdad" in response.json()["details"]

    def test_sdk_exception_is_500_without_leaking(self, client, mock_model):
        mock_model.generate_structured.side_effect = RuntimeError("api key abc123 rejected")
        response = client.post(URL, json=valid_body())
        assert response.status_code == 500
        body = response.json()
        assert body["error"] == "The AI service failed to process the request."
        assert body["details"] == "Upstream model error (RuntimeError)."
        assert "abc123" not in response.text


class TestSuccess:
    def test_response_shape(self, client):
        response = client.post(URL, json=valid_body())
        assert response.status_code == 200
        assert response.json() == {
            "title": {"en": IsStr, "ar": IsStr, "ku": IsStr},
            "description": {"en": IsStr, "ar": IsStr, "ku": IsStr},
            "suggestedCityId": "erbil",
            "suggestedCategoryId": "music",
            "generatedImageBase64": IsStr(min_length=1),
        }

    def test_image_is_a_real_png(self, client):
        data = client.post(URL, json=valid_body()).json()
        assert verify_image(base64.b64decode(data["generatedImageBase64"])) == "PNG"

    def test_one_image_requested_with_model_prompt(self, client, mock_model):
        client.post(URL, json=valid_body())
        mock_model.generate_images.assert_awaited_once_with(
            "Warm-lit rooftop stage with a saxophonist at dusk", number_of_images=1
        )

    def test_all_category_never_offered_to_model(self, client, mock_model):
        client.post(URL, json=valid_body())
        kwargs = mock_model.generate_structured.call_args.kwargs
        schema = kwargs["response_schema"]
        assert schema["properties"]["suggestedCategoryId"]["enum"] == ["music", "food"]
        assert schema["properties"]["suggestedCityId"]["enum"] == ["erbil", "duhok"]
        assert 'id: "all"' not in kwargs["system_instruction"]

    def test_text_only_request_has_single_part(self, client, mock_model):
        client.post(URL, json=valid_body())
        parts = mock_model.generate_structured.call_args.kwargs["parts"]
        assert parts == [f'Here is my event idea: "{VALID_PROMPT}"']

    def test_image_part_precedes_text(self, client, mock_model):
        response = client.post(URL, json=valid_body(imageBase64=png_data_url()))
        assert response.status_code == 200

        kwargs = mock_model.generate_structured.call_args.kwargs
        first, second = kwargs["parts"]
        assert isinstance(first, InlineImage)
        assert first.mime_type == "image/png"
        assert second.startswith("Here is my event idea:")
        assert "Analyze the Provided Image" in kwargs["system_instruction"]

    def test_success_recorded_in_metrics(self, client):
        client.post(URL, json=valid_body())
        data = client.get("/metrics").json()
        assert data["successes"] == 1
        assert data["requests_total"] == 1

    def test_request_id_header_echoed(self, client):
        response = client.post(URL, json=valid_body(), headers={"X-Request-ID": "abc12345"})
        assert response.headers["x-request-id"] == "abc12345"


class TestMockBackend:
    """MODEL_BACKEND=mock runs the whole pipeline offline."""

    def test_end_to_end(self, mock_backend_client):
        response = mock_backend_client.post(URL, json=valid_body())
        assert response.status_code == 200
        data = response.json()
        assert data["suggestedCityId"] == "erbil"
        assert data["suggestedCategoryId"] == "music"
        assert verify_image(base64.b64decode(data["generatedImageBase64"])) == "PNG"
