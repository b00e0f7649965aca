from termdash.cli import main

raise SystemExit(main())
