from snyk_installer.cli import main

raise SystemExit(main())
