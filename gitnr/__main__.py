from gitnr.cli import main

raise SystemExit(main())
