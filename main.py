#!/usr/bin/env python3
"""
Collect input files and report what would be converted.

Options:
  -f --file    [arg]  Filename to write the report to. Required.
  -i           [arg]  Input file to convert. Can be repeated.
  -x                  Increase the magic. Can be repeated.
  -e --explode        Fail on purpose after parsing, to see the error report.

The parsed option map is printed to standard output as JSON; every diagnostic
goes to standard error. Try it with -d to see tracing and the failure report.
"""
import json
import tempfile

from scaffold import invoke, script


@script
def main(options, log, lifecycle):
    workdir = lifecycle.enter(tempfile.TemporaryDirectory(prefix="scaffold-"))
    log.debug("working in", workdir)

    for path in options.get("i", []):
        log.info("queued", path)

    if options.get("explode"):
        raise RuntimeError("explosion requested")

    print(json.dumps(dict(options), sort_keys=True))
    log.notice("report ready", file=options["file"])


if __name__ == "__main__":
    invoke(main)
