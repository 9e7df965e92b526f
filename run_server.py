#!/usr/bin/env python3
"""
Convenience script to run the web API.

Usage:
    python run_server.py
    python run_server.py --port 8080
    python run_server.py --load table.json --lowercase
"""

import argparse
import logging

from web.app import create_app
from wordchain.config import ModelConfig
from wordchain.model import TransitionTable
from wordchain.training import setup_logging


if __name__ == '__main__':
    parser = argparse.ArgumentParser(description='Run N-gram Text Generation Web API')
    parser.add_argument('--host', default='127.0.0.1', help='Host to bind to')
    parser.add_argument('--port', type=int, default=5000, help='Port to bind to')
    parser.add_argument('--debug', action='store_true', help='Enable debug mode')
    parser.add_argument('--config', default=None, help='JSON file with default settings')
    parser.add_argument('--load', default=None, help='Transition table to serve on startup')
    parser.add_argument('--lowercase', action='store_true',
                        help='Case-fold tokens of tables built through the API')

    args = parser.parse_args()

    setup_logging(logging.DEBUG if args.debug else logging.INFO)

    config = ModelConfig.from_file(args.config) if args.config else ModelConfig()
    if args.lowercase:
        config = config.replace(lowercase=True)
    table = TransitionTable.load(args.load) if args.load else None
    if table is not None:
        config = config.replace(order=table.order, lowercase=table.lowercase)

    print(f"""
╔═══════════════════════════════════════════════════════╗
║     N-gram Text Generation Web API                    ║
╠═══════════════════════════════════════════════════════╣
║  Listening on http://{args.host}:{args.port}                  ║
╚═══════════════════════════════════════════════════════╝
    """)

    create_app(config, table).run(host=args.host, port=args.port,
                                  debug=args.debug, threaded=True)
