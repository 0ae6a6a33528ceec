"""Stand-in for the Gemini CLI. Behaviour is selected by the -p prompt."""

import json
import os
import subprocess
import sys
import time


def main(args: list[str]) -> int:
    prompt = args[args.index("-p") + 1] if "-p" in args else ""

    if prompt == "list files":
        print("a.txt")
        print("b.txt")
        return 0

    if prompt == "fail":
        sys.stderr.write("boom\n")
        return 3

    if prompt == "both":
        print("out", flush=True)
        sys.stderr.write("err\n")
        return 0

    if prompt in ("sleep", "Search for: sleep"):
        print("started", flush=True)
        time.sleep(60)
        return 0

    if prompt == "spawn child":
        # Same process group, like the tool started by a package runner
        child = subprocess.Popen([sys.executable, "-c", "import time; time.sleep(60)"])
        print(f"child {child.pid}", flush=True)
        time.sleep(60)
        return 0

    if prompt.startswith('Perform a web search for "json"'):
        print("```json")
        print(json.dumps({"summary": "found", "sources": [{"url": "https://example.com"}]}))
        print("```")
        return 0

    if prompt == "split utf8":
        # "é" is two bytes; write them in separate chunks
        sys.stdout.buffer.write(b"caf\xc3")
        sys.stdout.buffer.flush()
        time.sleep(0.1)
        sys.stdout.buffer.write(b"\xa9\n")
        sys.stdout.buffer.flush()
        return 0

    if prompt == "inspect" or "--inspect" in args:
        print(json.dumps({
            "argv": args,
            "cwd": os.getcwd(),
            "api_key": os.environ.get("GEMINI_API_KEY"),
            "ide": os.environ.get("ENABLE_IDE_INTEGRATION"),
        }))
        return 0

    print(prompt)
    return 0


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
