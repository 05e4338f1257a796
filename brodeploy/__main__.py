from brodeploy.setup.cli import main

raise SystemExit(main())
