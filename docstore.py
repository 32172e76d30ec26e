"""DocStore server entry point.

    python3 docstore.py [--config data/config/server_config.yml] [--port 8000]
    python3 docstore.py --print-template
"""
import sys

from docstore_lib.setup import get_parser, parse_args, setup
from docstore_lib.main import create_app, Config

args = parse_args(sys.argv[1:])
if args.help:
    get_parser().print_help()
    sys.exit(0)

rc, server_cfg = setup(sys.argv[1:])
if rc != 0 or server_cfg is None:
    sys.exit(rc)

app = create_app(Config(config_path=args.config, server_config=server_cfg))

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=args.host, port=args.port)
