from degmap.cli import main

raise SystemExit(main())
