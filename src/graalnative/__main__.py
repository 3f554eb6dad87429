from graalnative.cli import main

raise SystemExit(main())
