import sys

from bookstore_service.demo import main

sys.exit(main())
