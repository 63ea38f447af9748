from makedep.cli import main

raise SystemExit(main())
