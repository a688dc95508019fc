"""
Knowledge Base Assistant — Entry Point
Supports offline index building, CLI mode and web server mode.

Usage:
    python app.py --web                   # Launch the JSON API (default)
    python app.py --question "..."        # Ask a single question
    python app.py --interactive           # Interactive CLI mode
    python app.py --build-index           # Build data/index.json from the knowledge document
"""

import argparse
import sys
from pathlib import Path

import config
from core.errors import BackendFailure, ConfigurationError, IndexBuildError


def build_index(document: Path) -> int:
    from core.embeddings import get_embedding_backend
    from core.indexer import build_and_save_index

    backend = get_embedding_backend(config.EMBEDDING_BACKEND, config.EMBEDDING_MODEL, api_key=config.GOOGLE_API_KEY)
    print(f"📄 Document: {document}")
    print(f"💾 Index:    {config.INDEX_PATH}")
    try:
        index = build_and_save_index(
            document,
            config.INDEX_PATH,
            backend,
            chunk_size=config.CHUNK_SIZE,
            overlap=config.CHUNK_OVERLAP,
            batch_size=config.EMBEDDING_BATCH_SIZE,
        )
    except IndexBuildError as e:
        print(f"❌ {e}", file=sys.stderr)
        return 1
    print(f"✅ Saved {len(index.chunks)} embeddings to {config.INDEX_PATH}")
    return 0


def main():
    parser = argparse.ArgumentParser(
        description="Knowledge Base Assistant with grounded answers"
    )
    parser.add_argument(
        "--web", action="store_true", default=True,
        help="Launch the web API (default)"
    )
    parser.add_argument(
        "--question", "-q", type=str, default=None,
        help="Ask a single question from the command line"
    )
    parser.add_argument(
        "--interactive", "-i", action="store_true",
        help="Run in interactive CLI mode"
    )
    parser.add_argument(
        "--build-index", action="store_true",
        help="Build the embedding index from the knowledge document and exit"
    )
    parser.add_argument(
        "--document", type=Path, default=None,
        help="Source document for --build-index (default: PDF_PATH or data/knowledge.pdf)"
    )
    parser.add_argument(
        "--port", type=int, default=None,
        help="Port for the web server (default: PORT or 5173)"
    )

    args = parser.parse_args()
    config.configure_logging()

    try:
        if args.build_index:
            sys.exit(build_index(args.document or config.DOCUMENT_PATH))

        from core.pipeline import KnowledgeQAPipeline
        pipeline = KnowledgeQAPipeline()
        pipeline.initialize()
    except ConfigurationError as e:
        print(f"❌ {e}", file=sys.stderr)
        sys.exit(1)

    # Single question mode
    if args.question:
        try:
            result = pipeline.ask(args.question)
        except BackendFailure as e:
            print(f"❌ {e.message}", file=sys.stderr)
            sys.exit(1)
        print(f"\n[{result['mode']}] {result['answer']}")
        if result["citations"]:
            print("\n" + ", ".join(f"【{c['idx']}】 {c['score']:.3f}" for c in result["citations"]))
        return

    # Interactive CLI mode
    if args.interactive:
        print("\n=== Interactive Mode (type 'quit' to exit, 'reset' to clear history) ===\n")
        session_id = None
        while True:
            try:
                question = input("You: ").strip()
                if question.lower() in ("quit", "exit", "q"):
                    print("Goodbye!")
                    break
                if not question:
                    continue
                if question.lower() == "reset" and session_id:
                    pipeline.reset(session_id)
                    print("History cleared.\n")
                    continue

                result = pipeline.ask(question, session_id)
                session_id = result["sessionId"]
                print(f"\nAssistant: {result['answer']}\n")
            except BackendFailure as e:
                print(f"\n❌ {e.message}\n")
            except (KeyboardInterrupt, EOFError):
                print("\nGoodbye!")
                break
        return

    # Web mode (default)
    from frontend.server import create_app

    port = args.port or config.WEB_PORT
    app = create_app(pipeline)
    print(f"\n🚀 Server running on http://{config.WEB_HOST}:{port}")
    print("   Press Ctrl+C to stop.\n")
    app.run(host=config.WEB_HOST, port=port, debug=False)


if __name__ == "__main__":
    main()
