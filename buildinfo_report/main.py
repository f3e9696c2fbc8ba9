#!/usr/bin/env python3
"""
Print the build version and VCS settings embedded in this deployment.
"""
import sys

from buildinfo_report.core.config_service import config
from buildinfo_report.core.logging_service import get_logger
from buildinfo_report.core.build_info_service import BuildInfoUnavailable, default_source
from buildinfo_report.core import reporter

# Same status an unrecovered panic would leave behind
EXIT_BUILD_INFO_UNAVAILABLE = 2


def main():
    # Report is UTF-8 regardless of the console encoding
    reconfigure = getattr(sys.stdout, 'reconfigure', None)
    if reconfigure is not None:
        reconfigure(encoding='utf-8')

    config.reload()

    logger = get_logger('buildinfo-report', config.get('logging.level', 'WARNING'))
    logger.set_level(config.get('logging.level', 'WARNING'))
    logger.log_startup(config.get_all())

    try:
        reporter.run(default_source(config))
    except BuildInfoUnavailable as e:
        logger.critical(str(e))
        sys.exit(EXIT_BUILD_INFO_UNAVAILABLE)


if __name__ == "__main__":
    main()
