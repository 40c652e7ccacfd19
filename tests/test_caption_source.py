"""
Tests for the YouTube caption source.
"""

import asyncio
from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import pytest
from pytubefix import exceptions as pytube_exceptions
from youtube_transcript_api import NoTranscriptFound, TranscriptsDisabled, VideoUnavailable

from tubechat.core.caption_source import YouTubeCaptionSource
from tubechat.utils.error_handling import InvalidInputError, NoCaptionsError, VideoUnavailableError
from tests.conftest import TEST_VIDEO_ID, TEST_VIDEO_URL


@pytest.fixture
def mock_youtube():
    """Fixture to mock the pytubefix YouTube class."""
    with patch('tubechat.core.caption_source.YouTube') as mock_yt:
        mock_yt_instance = mock_yt.return_value
        mock_yt_instance.title = "Test Video"
        mock_yt_instance.author = "Test Author"
        mock_yt_instance.length = 212
        yield mock_yt


def make_transcript(snippets, language_code="en"):
    transcript = MagicMock()
    transcript.language_code = language_code
    transcript.fetch.return_value = [SimpleNamespace(**s) for s in snippets]
    return transcript


@pytest.fixture
def transcript():
    return make_transcript([
        {"text": "Hello\nthere", "start": 0.0, "duration": 1.5},
        {"text": "general  Kenobi", "start": 1.5, "duration": 2.0},
    ])


@pytest.fixture
def transcript_api(transcript):
    """Fixture to mock the transcript API client."""
    api = MagicMock()
    transcript_list = MagicMock()
    transcript_list.find_transcript.return_value = transcript
    api.list.return_value = transcript_list
    return api


def test_fetch_captions(mock_youtube, transcript_api):
    """Test fetching metadata and captions for a video."""
    source = YouTubeCaptionSource(languages=["en"], transcript_api=transcript_api)
    track = asyncio.run(source.fetch_captions(TEST_VIDEO_URL))

    assert track.video_id == TEST_VIDEO_ID
    assert track.metadata.title == "Test Video"
    assert track.metadata.channel == "Test Author"
    assert track.metadata.duration == 212.0
    assert track.language == "en"
    assert [c.text for c in track.captions] == ["Hello there", "general Kenobi"]
    assert track.captions[1].start == 1.5
    assert track.captions[1].end == 3.5

    transcript_api.list.assert_called_once_with(TEST_VIDEO_ID)
    transcript_api.list.return_value.find_transcript.assert_called_once_with(["en"])


def test_fetch_captions_invalid_url(mock_youtube, transcript_api):
    """Test that a non-YouTube URL is rejected before any request."""
    source = YouTubeCaptionSource(transcript_api=transcript_api)

    with pytest.raises(InvalidInputError):
        asyncio.run(source.fetch_captions("https://vimeo.com/12345"))

    mock_youtube.assert_not_called()
    transcript_api.list.assert_not_called()


def test_falls_back_to_first_track(mock_youtube, transcript_api):
    """Test that a video without the preferred language uses its first track."""
    german = make_transcript([{"text": "Hallo", "start": 0.0, "duration": 1.0}], language_code="de")
    transcript_list = transcript_api.list.return_value
    transcript_list.find_transcript.side_effect = NoTranscriptFound(TEST_VIDEO_ID, ["en"], MagicMock())
    transcript_list.__iter__.return_value = iter([german])

    source = YouTubeCaptionSource(languages=["en"], transcript_api=transcript_api)
    track = asyncio.run(source.fetch_captions(TEST_VIDEO_URL))

    assert track.language == "de"
    assert [c.text for c in track.captions] == ["Hallo"]


def test_no_tracks_at_all(mock_youtube, transcript_api):
    """Test that a video with no caption tracks raises NoCaptionsError."""
    transcript_list = transcript_api.list.return_value
    transcript_list.find_transcript.side_effect = NoTranscriptFound(TEST_VIDEO_ID, ["en"], MagicMock())
    transcript_list.__iter__.return_value = iter([])

    source = YouTubeCaptionSource(transcript_api=transcript_api)
    with pytest.raises(NoCaptionsError):
        asyncio.run(source.fetch_captions(TEST_VIDEO_URL))


def test_transcripts_disabled(mock_youtube, transcript_api):
    """Test that disabled captions raise NoCaptionsError."""
    transcript_api.list.side_effect = TranscriptsDisabled(TEST_VIDEO_ID)

    source = YouTubeCaptionSource(transcript_api=transcript_api)
    with pytest.raises(NoCaptionsError):
        asyncio.run(source.fetch_captions(TEST_VIDEO_URL))


def test_transcript_video_unavailable(mock_youtube, transcript_api):
    """Test that an unavailable video reported by the transcript API is mapped."""
    transcript_api.list.side_effect = VideoUnavailable(TEST_VIDEO_ID)

    source = YouTubeCaptionSource(transcript_api=transcript_api)
    with pytest.raises(VideoUnavailableError):
        asyncio.run(source.fetch_captions(TEST_VIDEO_URL))


def test_metadata_video_unavailable(mock_youtube, transcript_api):
    """Test that an unavailable video reported by pytubefix is mapped."""
    mock_youtube.side_effect = pytube_exceptions.VideoUnavailable(TEST_VIDEO_ID)

    source = YouTubeCaptionSource(transcript_api=transcript_api)
    with pytest.raises(VideoUnavailableError):
        asyncio.run(source.fetch_captions(TEST_VIDEO_URL))

    transcript_api.list.assert_not_called()
