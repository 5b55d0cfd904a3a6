from surface_distance.cli import main

raise SystemExit(main())
