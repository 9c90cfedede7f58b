from readme_sync.cli import main

raise SystemExit(main())
