"""Canonical content of the files scaffolded into an execution directory."""

from __future__ import annotations

REPORTS_DIRNAME = "reports"
REPORTS_PLACEHOLDER_FILENAME = ".gitkeep"
RUNNER_CONFIG_FILENAME = "cucumber.js"
WORLD_MODULE_PATH = "support/world.ts"
COMPILER_CONFIG_FILENAME = "tsconfig.json"

JSON_REPORT_FILENAME = "cucumber-report.json"
HTML_REPORT_FILENAME = "cucumber-report.html"

# Used by both the runner config file and the runner command line.
RUNNER_FORMATS = (
    "progress",
    f"json:{REPORTS_DIRNAME}/{JSON_REPORT_FILENAME}",
    f"html:{REPORTS_DIRNAME}/{HTML_REPORT_FILENAME}",
)
RUNNER_IMPORT_MODULE = "tsx/esm"
STEP_TIMEOUT_MS = 30000

RUNNER_CONFIG_TEMPLATE = """const config = {{
  default: {{
    paths: ['generated.feature'],
    import: ['{import_module}'],
    require: ['steps.generated.ts', 'support/**/*.ts'],
    format: [
{formats}
    ],
    formatOptions: {{
      snippetInterface: 'async-await'
    }},
    parallel: 1
  }}
}};

export default config;
""".format(
    import_module=RUNNER_IMPORT_MODULE,
    formats=",\n".join(f"      '{runner_format}'" for runner_format in RUNNER_FORMATS),
)

WORLD_MODULE_TEMPLATE = """import {{
  Before,
  After,
  setDefaultTimeout,
  setWorldConstructor,
  World,
  IWorldOptions
}} from '@cucumber/cucumber';
import {{ Browser, BrowserContext, Page, chromium, firefox, webkit }} from 'playwright';

setDefaultTimeout({step_timeout_ms});

export class PlaywrightWorld extends World {{
  public browser?: Browser;
  public context?: BrowserContext;
  public page?: Page;

  constructor(options: IWorldOptions) {{
    super(options);
  }}

  async init(): Promise<void> {{
    const browserType = process.env.BROWSER || 'chromium';
    const headless = process.env.HEADLESS !== 'false';

    switch (browserType) {{
      case 'firefox':
        this.browser = await firefox.launch({{ headless }});
        break;
      case 'webkit':
        this.browser = await webkit.launch({{ headless }});
        break;
      case 'chromium':
      default:
        this.browser = await chromium.launch({{ headless }});
        break;
    }}

    this.context = await this.browser.newContext({{
      viewport: {{ width: 1280, height: 720 }},
      ignoreHTTPSErrors: true
    }});

    this.page = await this.context.newPage();
  }}

  async cleanup(): Promise<void> {{
    try {{
      if (this.page) await this.page.close();
      if (this.context) await this.context.close();
    }} finally {{
      if (this.browser) await this.browser.close();
      this.page = undefined;
      this.context = undefined;
      this.browser = undefined;
    }}
  }}
}}

setWorldConstructor(PlaywrightWorld);

Before(async function (this: PlaywrightWorld) {{
  await this.init();
}});

After(async function (this: PlaywrightWorld) {{
  await this.cleanup();
}});
""".format(step_timeout_ms=STEP_TIMEOUT_MS)

COMPILER_CONFIG_TEMPLATE = """{
  "compilerOptions": {
    "target": "ES2020",
    "module": "ESNext",
    "moduleResolution": "node",
    "esModuleInterop": true,
    "allowSyntheticDefaultImports": true,
    "strict": true,
    "skipLibCheck": true,
    "resolveJsonModule": true,
    "types": ["node", "@cucumber/cucumber", "playwright"]
  },
  "include": ["**/*.ts"],
  "exclude": ["node_modules", "reports"]
}
"""
