"""
YouTube caption and metadata fetching module.
"""

import asyncio
from typing import List, Optional

from pytubefix import YouTube
from pytubefix import exceptions as pytube_exceptions
from youtube_transcript_api import (
    YouTubeTranscriptApi,
    NoTranscriptFound,
    TranscriptsDisabled,
    VideoUnavailable,
)

from tubechat.config import config
from tubechat.models.schemas import CaptionCue, CaptionTrack, VideoMetadata
from tubechat.utils.error_handling import (
    InvalidInputError,
    NoCaptionsError,
    VideoUnavailableError,
)
from tubechat.utils.helpers import extract_video_id, watch_url
from tubechat.utils.logger import logging

INVALID_URL_MESSAGE = "Invalid YouTube URL. Please provide a valid YouTube video link."
UNAVAILABLE_MESSAGE = "Video is unavailable. It may be private, deleted, age-restricted, or region-locked."
NO_CAPTIONS_MESSAGE = "No captions available for this video. The video creator has not enabled captions."


class YouTubeCaptionSource:
    """Class to fetch a video's metadata and caption track."""

    def __init__(self, languages: Optional[List[str]] = None, transcript_api: Optional[YouTubeTranscriptApi] = None):
        """
        Initialize the caption source.

        Args:
            languages: Preferred caption languages, in order
            transcript_api: Transcript API client (a fresh one if None)
        """
        self.languages = languages or config.CAPTION_LANGUAGES
        self.transcript_api = transcript_api or YouTubeTranscriptApi()

    async def fetch_captions(self, video_url: str) -> CaptionTrack:
        """
        Fetch metadata and captions for a video.

        Args:
            video_url: YouTube video URL

        Returns:
            CaptionTrack with metadata and ordered captions

        Raises:
            InvalidInputError: If the URL is not a YouTube video link
            VideoUnavailableError: If the video cannot be accessed
            NoCaptionsError: If the video has no caption track
        """
        video_id = extract_video_id(video_url)
        if not video_id:
            raise InvalidInputError(INVALID_URL_MESSAGE)

        metadata = await asyncio.to_thread(self.get_metadata, video_id)
        captions, language = await asyncio.to_thread(self.get_captions, video_id)

        logging.info(f"Fetched {len(captions)} captions ({language}) for video {video_id}: {metadata.title}")
        return CaptionTrack(
            video_id=video_id,
            metadata=metadata,
            captions=captions,
            language=language,
        )

    def get_metadata(self, video_id: str) -> VideoMetadata:
        """Extract title, channel and duration of a video."""
        try:
            yt = YouTube(watch_url(video_id))
            return VideoMetadata(
                title=yt.title,
                channel=yt.author,
                duration=float(yt.length or 0),
            )
        except pytube_exceptions.RegexMatchError as e:
            raise InvalidInputError(INVALID_URL_MESSAGE, video_id=video_id) from e
        except pytube_exceptions.VideoUnavailable as e:
            logging.warning(f"Video {video_id} is unavailable: {str(e)}")
            raise VideoUnavailableError(UNAVAILABLE_MESSAGE, video_id=video_id) from e

    def get_captions(self, video_id: str):
        """
        Fetch the caption track of a video.

        Prefers the configured languages and falls back to the first
        available track.

        Returns:
            Tuple of (captions, language code)
        """
        try:
            transcript_list = self.transcript_api.list(video_id)
            try:
                transcript = transcript_list.find_transcript(self.languages)
            except NoTranscriptFound:
                transcript = next(iter(transcript_list), None)

            if transcript is None:
                raise NoCaptionsError(NO_CAPTIONS_MESSAGE, video_id=video_id)

            fetched = transcript.fetch()
        except VideoUnavailable as e:
            logging.warning(f"Video {video_id} is unavailable: {str(e)}")
            raise VideoUnavailableError(UNAVAILABLE_MESSAGE, video_id=video_id) from e
        except (TranscriptsDisabled, NoTranscriptFound) as e:
            logging.warning(f"No captions for video {video_id}: {type(e).__name__}")
            raise NoCaptionsError(NO_CAPTIONS_MESSAGE, video_id=video_id) from e

        captions = [
            CaptionCue(text=" ".join(snippet.text.split()), start=snippet.start, duration=snippet.duration)
            for snippet in fetched
        ]
        if not captions:
            raise NoCaptionsError(NO_CAPTIONS_MESSAGE, video_id=video_id)

        return captions, transcript.language_code
