"""yt-dlp invocation inside the downloader container."""

from typing import List

from app.config import Settings, settings as default_settings

# Path of the music library as mounted inside the yt-dlp container
CONTAINER_MUSIC_ROOT = "/music"


def build_ytdlp_command(source_url: str, folder: str, settings: Settings = default_settings) -> List[str]:
    """Argument vector for an mp3 extraction of ``source_url`` into ``folder``."""
    output_template = f"{CONTAINER_MUSIC_ROOT}/{folder}/%(artist,uploader)s - %(title)s.%(ext)s"
    return [
        settings.docker_bin,
        "exec",
        "-i",
        settings.ytdlp_container,
        "yt-dlp",
        "--extractor-args", "youtube:player_client=android",
        "--retries", "10",
        "--fragment-retries", "10",
        "-x",
        "--audio-format", "mp3",
        "--audio-quality", "0",
        "--embed-metadata",
        "--embed-thumbnail",
        "--no-playlist",
        "--restrict-filenames",
        "--newline",
        "-o", output_template,
        source_url,
    ]
