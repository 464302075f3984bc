from __future__ import annotations
import argparse, logging, sys, threading

from .collectors import capture_once, collector_loop, select_backend
from .config import ConfigError, init_cfg_from_args
from .snapshot import Snapshot


def parse_args(argv=None):
    ap = argparse.ArgumentParser(description='Per-listener accept queue and connection statistics')
    ap.add_argument('--config', type=str, default=None, help='YAML file with CFG keys')
    ap.add_argument('--address', dest='addresses', action='append', default=None,
                    help='TCP listener to report, e.g. 0.0.0.0:80 or [::]:443 (repeatable)')
    ap.add_argument('--path', dest='paths', action='append', default=None,
                    help='unix socket path to report (repeatable)')
    ap.add_argument('--interval', type=float, default=None)
    ap.add_argument('--host', type=str, default=None)
    ap.add_argument('--port', type=int, default=None)
    ap.add_argument('--proc-net', dest='proc_net', type=str, default=None, help='directory holding tcp, tcp6 and unix tables')
    ap.add_argument('--netstat', type=str, default=None, help='netstat binary (macOS)')
    ap.add_argument('--log-level', dest='log_level', type=str, default=None)
    ap.add_argument('--once', action='store_true', help='print one capture as JSON and exit')
    return ap.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)
    try:
        cfg = init_cfg_from_args(args)
    except ConfigError as e:
        print(f"[error] {e}", file=sys.stderr)
        return 2
    logging.basicConfig(level=cfg.log_level.upper(), format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    snap = Snapshot()
    if args.once:
        from .models import to_json
        backend = select_backend(proc_net=cfg.proc_net, netstat=cfg.netstat)
        listeners = capture_once(cfg, snap, backend)
        sys.stdout.write(to_json(listeners).decode() + "\n")
        return 0

    from .web import create_app
    t = threading.Thread(target=collector_loop, args=(cfg, snap, cfg.interval), daemon=True)
    t.start()

    app = create_app(cfg, snap)
    print(f"[*] Serving on http://{cfg.host}:{cfg.port}")
    app.run(host=cfg.host, port=cfg.port, debug=False, use_reloader=False)
    return 0


if __name__ == '__main__':
    sys.exit(main())
