"""Command-line interface for mood-based music discovery"""

import asyncio
import argparse
import json
import sys
from typing import Any, Dict, List, Optional

from .clients.discovery_client import create_discovery_client
from .core.settings import get_settings
from .core.exceptions import DiscoveryError
from .core.logging import setup_logging, get_logger
from .services.discovery_service import DiscoveryService, create_discovery_service
from .services.sentiment import create_sentiment_scorer
from .services.video_transformer import format_like_count, format_published_date, format_view_count

# Setup logging system
setup_logging()
logger = get_logger(__name__)


class MoodTunesCLI:
    """Command-line interface for mood-based music discovery"""

    def __init__(self):
        self.settings = get_settings()
        logger.info(f"CLI initialized - Environment: {self.settings.environment}")

    def create_parser(self) -> argparse.ArgumentParser:
        """Create command-line argument parser"""
        parser = argparse.ArgumentParser(
            description="Discover music videos that match how you feel",
            formatter_class=argparse.RawDescriptionHelpFormatter,
            epilog=(
                "Examples:\n"
                "  python main.py discover \"Aku sangat senang dan bahagia hari ini\" --language id\n"
                "  python main.py discover \"feeling tired and lonely\" --remote --json\n"
                "  python main.py analyze \"what a wonderful day\"\n"
                "  python main.py serve --port 8000"
            )
        )

        subparsers = parser.add_subparsers(dest='command', help='Available commands')

        # Discover command
        discover_parser = subparsers.add_parser(
            'discover',
            help='Find music videos for a mood description'
        )
        discover_parser.add_argument('mood', help='Free-text mood description')
        discover_parser.add_argument(
            '--language',
            choices=['id', 'en'],
            default='id',
            help='Language used to pick the search region (default: id)'
        )
        discover_parser.add_argument(
            '--remote',
            action='store_true',
            help='Call a running discovery API with retries instead of running in-process'
        )
        discover_parser.add_argument(
            '--api-url',
            help='Discovery API base URL for --remote (default: MOODTUNES_API_URL)'
        )
        discover_parser.add_argument(
            '--json',
            action='store_true',
            help='Print the raw JSON response'
        )

        # Analyze command
        analyze_parser = subparsers.add_parser(
            'analyze',
            help='Classify a mood description without looking up videos'
        )
        analyze_parser.add_argument('mood', help='Free-text mood description')
        analyze_parser.add_argument(
            '--json',
            action='store_true',
            help='Print the raw JSON response'
        )

        # Serve command
        serve_parser = subparsers.add_parser(
            'serve',
            help='Run the discovery API server'
        )
        serve_parser.add_argument('--host', help='Bind address (default: from settings)')
        serve_parser.add_argument('--port', type=int, help='Port (default: from settings)')
        serve_parser.add_argument(
            '--reload',
            action='store_true',
            help='Reload on code changes (development only)'
        )

        return parser

    async def discover_command(self, args) -> Dict[str, Any]:
        """Run discovery in-process or against a remote API"""
        if args.remote:
            async with create_discovery_client(args.api_url) as client:
                result = await client.discover_music(args.mood, args.language)
        else:
            service = create_discovery_service()
            try:
                response = await service.discover(args.mood, args.language)
            finally:
                if service.youtube_client is not None:
                    await service.youtube_client.aclose()
            result = response.model_dump(mode="json")

        if args.json:
            print(json.dumps(result, indent=2, ensure_ascii=False))
        else:
            self._display_discovery(result)
        return result

    def analyze_command(self, args) -> Dict[str, Any]:
        """Classify a mood description"""
        service = DiscoveryService(scorer=create_sentiment_scorer(self.settings))
        result = service.analyze_mood(args.mood).model_dump(mode="json")

        if args.json:
            print(json.dumps(result, indent=2, ensure_ascii=False))
        else:
            self._display_analysis(result)
        return result

    def serve_command(self, args) -> None:
        """Run the API server with uvicorn"""
        import uvicorn

        uvicorn.run(
            "moodtunes.api.main:app",
            host=args.host or self.settings.host,
            port=args.port or self.settings.port,
            reload=args.reload and self.settings.is_development,
            log_level=self.settings.log_level.lower()
        )

    def _display_discovery(self, result: Dict[str, Any]) -> None:
        """Display discovered videos in readable format"""
        mood = result.get("mood_analysis", {})
        videos: List[Dict[str, Any]] = result.get("data", [])

        print("\n🎵 MOOD MUSIC DISCOVERY")
        print("=" * 60)
        print(f"\n🎯 Mood: {mood.get('sentiment')} (confidence {mood.get('score', 0):.0%})")
        print(f"🔎 Search: {mood.get('keywords')}")

        print(f"\n🎬 Found {len(videos)} videos:")
        for i, video in enumerate(videos, 1):
            print(f"\n   {i}. {video['title']}")
            print(f"      {video['channelTitle']} • {format_published_date(video['publishedAt'])}")
            print(f"      {format_view_count(video['viewCount'])} • {format_like_count(video['likeCount'])}")
            print(f"      https://www.youtube.com/watch?v={video['id']}")

    def _display_analysis(self, result: Dict[str, Any]) -> None:
        """Display a mood analysis in readable format"""
        insights = result.get("insights", {})

        print("\n🧠 MOOD ANALYSIS")
        print("=" * 60)
        print(f"\n🎯 Mood: {insights.get('category')}")
        print(f"📊 Confidence: {insights.get('confidence', 0):.0%} ({insights.get('confidence_level')})")
        print(f"🔑 Keywords: {', '.join(insights.get('keywords', []))}")
        print(f"\n💡 {insights.get('recommendation')}")


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point"""
    cli = MoodTunesCLI()
    parser = cli.create_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 0

    try:
        if args.command == 'discover':
            asyncio.run(cli.discover_command(args))
        elif args.command == 'analyze':
            cli.analyze_command(args)
        elif args.command == 'serve':
            cli.serve_command(args)
    except KeyboardInterrupt:
        print("\n⚠️  Operation cancelled by user")
        return 130
    except DiscoveryError as e:
        print(f"\n❌ {e.kind.value}: {e.message}")
        logger.warning(f"CLI command failed: {e!r}")
        return 1
    except Exception as e:
        print(f"\n❌ Fatal error: {e}")
        logger.exception("CLI command failed")
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
