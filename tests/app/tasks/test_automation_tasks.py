"""Tests for automation Celery tasks."""

from unittest.mock import MagicMock, patch

import pytest
import requests

from app.tasks.automation_tasks import analyze_conversation_task, transcribe_audio_task


def _settings(**overrides):
    settings = MagicMock()
    settings.transcription_job_url = "https://jobs.example.com/transcribe-audio"
    settings.sentiment_job_url = "https://jobs.example.com/ai-analyze-conversation"
    settings.automation_job_token = "job-token"
    settings.http_timeout_seconds = 15.0
    for key, value in overrides.items():
        setattr(settings, key, value)
    return settings


@patch("app.tasks.automation_tasks.requests.post")
@patch("app.tasks.automation_tasks.get_settings")
def test_transcribe_audio_task_posts_job(mock_settings, mock_post):
    mock_settings.return_value = _settings()
    mock_post.return_value = MagicMock(status_code=202)

    assert transcribe_audio_task("msg-1", "https://storage.example.com/a.ogg") is True

    args, kwargs = mock_post.call_args
    assert args[0] == "https://jobs.example.com/transcribe-audio"
    assert kwargs["json"] == {
        "messageId": "msg-1",
        "mediaUrl": "https://storage.example.com/a.ogg",
    }
    assert kwargs["headers"]["Authorization"] == "Bearer job-token"
    assert kwargs["timeout"] == 15.0


@patch("app.tasks.automation_tasks.requests.post")
@patch("app.tasks.automation_tasks.get_settings")
def test_analyze_conversation_task_posts_job(mock_settings, mock_post):
    mock_settings.return_value = _settings(automation_job_token=None)
    mock_post.return_value = MagicMock(status_code=200)

    assert analyze_conversation_task("conv-1") is True

    args, kwargs = mock_post.call_args
    assert args[0] == "https://jobs.example.com/ai-analyze-conversation"
    assert kwargs["json"] == {"conversationId": "conv-1"}
    assert "Authorization" not in kwargs["headers"]


@patch("app.tasks.automation_tasks.requests.post")
@patch("app.tasks.automation_tasks.get_settings")
def test_unconfigured_job_is_skipped(mock_settings, mock_post):
    mock_settings.return_value = _settings(sentiment_job_url=None)
    assert analyze_conversation_task("conv-1") is False
    mock_post.assert_not_called()


@patch("app.tasks.automation_tasks.requests.post")
@patch("app.tasks.automation_tasks.get_settings")
def test_job_http_error_is_raised_for_retry(mock_settings, mock_post):
    mock_settings.return_value = _settings()
    response = MagicMock(status_code=503)
    response.raise_for_status.side_effect = requests.HTTPError("503")
    mock_post.return_value = response

    with pytest.raises(requests.HTTPError):
        transcribe_audio_task("msg-1", "https://storage.example.com/a.ogg")
