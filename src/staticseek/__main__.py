import sys

from staticseek.cli import main


sys.exit(main())
