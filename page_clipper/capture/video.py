"""
Video embedder for tweet captures.

A captured tweet shows a still thumbnail where the player was. When the
media URL can be looked up, the player markup around the thumbnail is
replaced with a plain <video> element.
"""

from dataclasses import dataclass
from typing import Awaitable, Callable, List, Optional

from bs4 import Tag

from ..utils.log import get_logger
from ..utils.errors import FetchError
from ..utils.constants import ATTR_SRC, ATTR_VIDEO
from .document import DocumentModel


@dataclass
class TweetMedia:
    """Result of a media lookup."""
    
    url: str


# tweet id -> media, or None when the tweet has no playable media
MediaResolver = Callable[[str], Awaitable[Optional[TweetMedia]]]


# The element replaced is the thumbnail's third ancestor. This assumes the
# player markup wraps the thumbnail <img> in exactly three containers; a
# thumbnail with fewer ancestors is left in place.
REPLACEMENT_ANCESTOR_DEPTH = 3


class VideoEmbedder:
    """
    Replaces tweet video and gif thumbnails with playable media.
    """
    
    # The provenance attribute still matches after src was rewritten
    GIF_THUMBNAIL_SELECTORS = (
        'img[src*="/tweet_video_thumb/"]',
        f'img[{ATTR_SRC}*="/tweet_video_thumb/"]',
    )
    VIDEO_THUMBNAIL_SELECTORS = (
        'img[src*="/ext_tw_video_thumb/"]',
        f'img[{ATTR_SRC}*="/ext_tw_video_thumb/"]',
    )
    
    def __init__(self, document: DocumentModel, resolver: MediaResolver):
        """
        Initialize the video embedder.
        
        Args:
            document: Document to modify
            resolver: External lookup of a tweet's media URL
        """
        self.document = document
        self.resolver = resolver
        self.logger = get_logger("video")
    
    async def embed_twitter_video(self, tweet_id: str) -> List[Tag]:
        """
        Replace the gif and/or video thumbnail of a tweet.
        
        Each kind is looked up independently; a failed lookup leaves its
        thumbnail untouched.
        
        Args:
            tweet_id: Identifier of the captured tweet
            
        Returns:
            The created video elements
        """
        created = []
        
        for selectors, is_gif in (
            (self.GIF_THUMBNAIL_SELECTORS, True),
            (self.VIDEO_THUMBNAIL_SELECTORS, False),
        ):
            thumbnail = self.document.find_one(*selectors)
            if thumbnail is None:
                continue
            
            media = await self._lookup(tweet_id)
            if media is None:
                continue
            
            video = self.replace_video_element(thumbnail, media.url, is_gif)
            if video is not None:
                created.append(video)
        
        return created
    
    async def _lookup(self, tweet_id: str) -> Optional[TweetMedia]:
        try:
            media = await self.resolver(tweet_id)
        except FetchError as e:
            self.logger.warning(f"Media lookup failed for tweet {tweet_id}: {e}")
            return None
        
        if media is None:
            self.logger.debug(f"No media found for tweet {tweet_id}")
        
        return media
    
    def replace_video_element(self, thumbnail: Tag, url: str, is_gif: bool) -> Optional[Tag]:
        """
        Swap the player wrapping a thumbnail for a <video> element.
        
        Args:
            thumbnail: The thumbnail <img>
            url: Media URL to play
            is_gif: Muted looping autoplay instead of a paused player
            
        Returns:
            The new element, or None if the thumbnail lacks the expected
            ancestors
        """
        target = thumbnail
        for _ in range(REPLACEMENT_ANCESTOR_DEPTH):
            target = target.parent
            if target is None or target.name in ('body', 'html', '[document]'):
                self.logger.warning("Thumbnail is not nested as expected, leaving it in place")
                return None
        
        attrs = {
            ATTR_VIDEO: 'gif' if is_gif else 'video',
            'src': url,
            'style': 'width: 100%; height: 100%; position: relative;',
        }
        if is_gif:
            attrs.update({'muted': '', 'autoplay': '', 'loop': ''})
        attrs['controls'] = ''
        
        video = self.document.new_tag('video', attrs)
        target.replace_with(video)
        
        return video
