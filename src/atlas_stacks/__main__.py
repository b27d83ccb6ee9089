from atlas_stacks.cli import main

raise SystemExit(main())
