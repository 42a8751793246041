import sys

from ai_commit_msg.cli.main import main

sys.exit(main())
