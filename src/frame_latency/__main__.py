from frame_latency.cli import main

raise SystemExit(main())
