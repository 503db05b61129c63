"""
Deploy build hooks
Called by the hosting platform around a site build. The hooks only log the
event; nothing is built or published from here.

Usage: python -m subbill.scripts.build_hooks <event>
"""

import sys
import logging

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def on_pre_build():
    logger.info("Pre-build: preparing build")


def on_build():
    logger.info("Build: running build")


def on_post_build():
    logger.info("Post-build: build finished")


def on_success():
    logger.info("Build succeeded")


def on_error(error: str = ""):
    logger.error(f"Build failed: {error}" if error else "Build failed")


HOOKS = {
    "pre-build": on_pre_build,
    "build": on_build,
    "post-build": on_post_build,
    "success": on_success,
}


def main(argv=None) -> int:
    args = list(sys.argv[1:] if argv is None else argv)
    if not args:
        logger.error(f"Usage: build_hooks <{'|'.join(list(HOOKS) + ['error'])}> [message]")
        return 2
    event = args[0]
    if event == "error":
        on_error(" ".join(args[1:]))
        return 0
    hook = HOOKS.get(event)
    if hook is None:
        logger.error(f"Unknown build event: {event}")
        return 2
    hook()
    return 0


if __name__ == "__main__":
    sys.exit(main())
