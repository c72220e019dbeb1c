import json
import unittest
from unittest.mock import MagicMock, patch

from seller_ops.config import Settings
from seller_ops.services.llm_service import build_payload, complete_chat, extract_content, validate_api_url


def _settings(**overrides):
    values = {"LLM_API_KEY": "test-key", "LLM_MODEL": "test/model"}
    values.update(overrides)
    return Settings(**values)


def _response(body, status=200):
    response = MagicMock()
    response.getcode.return_value = status
    response.read.return_value = json.dumps(body).encode("utf-8")
    context = MagicMock()
    context.__enter__.return_value = response
    return context


class LlmServiceTest(unittest.TestCase):
    def test_payload_has_system_and_user_messages(self):
        payload = build_payload("m", "sys", "usr", temperature=0.4, max_tokens=4000)
        self.assertEqual(payload["model"], "m")
        self.assertEqual([message["role"] for message in payload["messages"]], ["system", "user"])
        self.assertEqual(payload["max_tokens"], 4000)

    def test_validate_api_url(self):
        self.assertEqual(validate_api_url("https://llm.example.com/v1"), "https://llm.example.com/v1")
        with self.assertRaises(RuntimeError):
            validate_api_url("file:///etc/passwd")

    def test_extract_content(self):
        body = {"choices": [{"message": {"content": "  Hello  "}}]}
        self.assertEqual(extract_content(body), "Hello")
        with self.assertRaises(RuntimeError):
            extract_content({"choices": []})
        with self.assertRaises(RuntimeError):
            extract_content({"choices": [{"message": {"content": "   "}}]})

    def test_complete_chat_posts_bearer_request(self):
        body = {"choices": [{"message": {"content": "Advice"}}]}
        with patch("seller_ops.services.llm_service.get_settings", return_value=_settings()), patch(
            "seller_ops.services.llm_service.request.urlopen", return_value=_response(body)
        ) as urlopen:
            result = complete_chat("system", "user", temperature=0.4, max_tokens=50)

        self.assertEqual(result, "Advice")
        req = urlopen.call_args[0][0]
        self.assertEqual(req.get_header("Authorization"), "Bearer test-key")
        sent = json.loads(req.data.decode("utf-8"))
        self.assertEqual(sent["model"], "test/model")
        self.assertEqual(sent["temperature"], 0.4)

    def test_complete_chat_requires_key(self):
        with patch("seller_ops.services.llm_service.get_settings", return_value=_settings(LLM_API_KEY=None)):
            with self.assertRaises(RuntimeError):
                complete_chat("system", "user")

    def test_complete_chat_rejects_non_2xx(self):
        with patch("seller_ops.services.llm_service.get_settings", return_value=_settings()), patch(
            "seller_ops.services.llm_service.request.urlopen", return_value=_response({}, status=500)
        ):
            with self.assertRaises(RuntimeError):
                complete_chat("system", "user")


if __name__ == "__main__":
    unittest.main()
