import sys

from src.routing.bootstrap import resolve_request, run_route_flush

# python -m src.routing [flush | force | resolve <path>]
if __name__ == "__main__":
    command = sys.argv[1] if len(sys.argv) > 1 else "flush"
    if command == "resolve" and len(sys.argv) > 2:
        print(resolve_request(sys.argv[2]))
    else:
        outcome = run_route_flush(force=command == "force")
        print(outcome.to_dict())
