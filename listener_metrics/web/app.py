from __future__ import annotations
from flask import Flask, Response, jsonify, request

from ..collectors import capture_once, select_backend
from ..config import CFG
from ..models import to_json
from ..snapshot import Snapshot


def create_app(cfg: CFG, snap: Snapshot) -> Flask:
    app = Flask(__name__)

    @app.get("/api/listeners")
    def api_listeners():
        address = request.args.get("address")
        # addresses are matched case-insensitively, unix paths exactly
        key = address.lower() if address is not None else request.args.get("path")
        with snap.lock:
            listeners = dict(snap.listeners)
        if key is not None:
            if key not in listeners:
                return jsonify({"error": "not found", "key": key}), 404
            listeners = {key: listeners[key]}
        return Response(to_json(listeners), mimetype="application/json")

    @app.get("/api/status")
    def api_status():
        with snap.lock:
            return jsonify({
                "supported": snap.backend is not None,
                "backend": snap.backend,
                "captured_at": snap.captured_at,
                "listeners": len(snap.listeners),
            })

    @app.post("/api/capture")
    def api_capture():
        backend = select_backend(proc_net=cfg.proc_net, netstat=cfg.netstat)
        listeners = capture_once(cfg, snap, backend)
        app.logger.info("on-demand capture: %d listeners (%s)", len(listeners),
                        backend.NAME if backend else "unsupported")
        return Response(to_json(listeners), mimetype="application/json")

    return app
