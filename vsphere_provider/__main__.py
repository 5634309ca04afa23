import sys

from vsphere_provider.cli import main

sys.exit(main())
