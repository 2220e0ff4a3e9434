"""
Web server for viewing saved game runs.
"""

import json
from pathlib import Path
from flask import Flask, jsonify, request

from .run_recorder import RunRecorder


class ViewerServer:
    """JSON API over recorded game runs."""

    def __init__(self, port: int = 5000, host: str = '127.0.0.1', runs_dir: str = "runs"):
        self.port = port
        self.host = host
        self.runs_dir = Path(runs_dir)
        self.run_recorder = RunRecorder(runs_dir=runs_dir)

        self.app = Flask(__name__)

        # Setup routes
        self._setup_routes()

    def _setup_routes(self):
        """Setup Flask routes."""
        @self.app.route('/')
        def index():
            return jsonify({
                "runs": "/api/runs",
                "events": "/api/runs/<run_name>/events",
                "metadata": "/api/runs/<run_name>/metadata",
                "stream": "/api/runs/<run_name>/events/stream?last_position=N",
            })

        @self.app.route('/api/runs')
        def list_runs():
            """List all available runs."""
            return jsonify(self.run_recorder.list_runs())

        @self.app.route('/api/runs/<run_name>/events')
        def get_events(run_name: str):
            """Get events for a specific run."""
            try:
                events = self.run_recorder.read_events(run_name)
            except (OSError, json.JSONDecodeError) as e:
                return jsonify({"error": str(e)}), 500

            if events is None:
                return jsonify({"error": "Run not found"}), 404
            return jsonify(events)

        @self.app.route('/api/runs/<run_name>/metadata')
        def get_metadata(run_name: str):
            """Get metadata for a specific run."""
            metadata_file = self.runs_dir / run_name / "metadata.json"

            if not metadata_file.exists():
                return jsonify({"error": "Run not found"}), 404

            try:
                with open(metadata_file, 'r') as f:
                    metadata = json.load(f)
            except (OSError, json.JSONDecodeError) as e:
                return jsonify({"error": str(e)}), 500
            return jsonify(metadata)

        @self.app.route('/api/runs/<run_name>/events/stream')
        def stream_events(run_name: str):
            """Events recorded after a position (for live updates)."""
            last_position = request.args.get('last_position', 0, type=int)

            try:
                result = self.run_recorder.read_events_from(run_name, after=last_position)
            except (OSError, json.JSONDecodeError) as e:
                return jsonify({"error": str(e)}), 500

            if result is None:
                return jsonify({"error": "Run not found"}), 404

            events, position = result
            return jsonify({
                "events": events,
                "position": position,
            })

    def start(self) -> None:
        """Start the web server."""
        print(f"\n{'='*60}")
        print(f"Starting viewer server on http://{self.host}:{self.port}")
        print(f"Runs directory: {self.runs_dir}")
        print(f"{'='*60}\n")
        self.app.run(host=self.host, port=self.port, debug=False, use_reloader=False)
