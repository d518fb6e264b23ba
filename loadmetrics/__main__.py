from loadmetrics.cli import main

raise SystemExit(main())
